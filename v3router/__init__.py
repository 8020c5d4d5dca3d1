"""
v3router: pool discovery, swap routing and quoting for Uniswap V3 style AMMs.
"""

__version__ = "0.1.0"
