"""portwalker: find open ports on a host, then walk a fixed HTTP endpoint
sequence against each of them."""

__version__ = "0.1.0"
