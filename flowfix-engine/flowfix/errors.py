"""Errors raised by the normalization engine.

Only an unusable node list is fatal. Every other defect in an LLM
candidate is repaired in place and never surfaces as an exception.
"""


class NormalizerError(Exception):
    """Base class for normalization failures."""


class MalformedGraphError(NormalizerError, ValueError):
    """The candidate has no usable node list and cannot be salvaged."""


class CandidateParseError(NormalizerError, ValueError):
    """No JSON object could be extracted from an LLM reply."""
