#!/usr/bin/env python

"""
    Core module for Lendbook: storage, lending and loan queries

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""
