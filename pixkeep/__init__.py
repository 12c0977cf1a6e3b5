"""PixKeep - shared clipboard image library with expiration"""

__version__ = '1.0.0'
