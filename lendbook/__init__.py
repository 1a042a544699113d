#!/usr/bin/env python

"""
    Lendbook, a book lending service that keeps track of who holds
    which book and never lends one book to two holders at once.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

__version__ = '0.1.0'
