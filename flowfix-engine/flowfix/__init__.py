"""FlowFix - repairs LLM-generated n8n workflows into importable JSON."""

__version__ = "0.1.0"
