"""
Error types of the sampler.

Author: B.G.
"""


class PreconditionError(RuntimeError):
    """
    Caller-contract violation detected by the sampler.

    Raised for requests the engine refuses to approximate: an unresolved
    filter kind reaching kernel evaluation, a boundary mode other than
    'exclude', or the normals post-pass on an image that is not 3-channel.
    """
