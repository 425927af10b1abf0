"""
Portfolio Kelly: growth-optimal position sizing across simultaneous legs.

Turns betting and trading edge estimates into recommended capital
fractions by maximising expected log growth of wealth over a set of
positions held at the same time, either independent or correlated.
"""

__version__ = "0.1.0"
