# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tracing and logging setup.
"""

from .config import setup_observability, setup_structured_logging

__all__ = ["setup_observability", "setup_structured_logging"]
