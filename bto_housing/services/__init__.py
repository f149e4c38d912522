# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Storage services for the BTO housing workflow.
"""

from .repository import Repository, InMemoryRepository, HousingStores
from .mongodb import MongoDBService, MongoRepository

__all__ = [
    'Repository',
    'InMemoryRepository',
    'HousingStores',
    'MongoDBService',
    'MongoRepository'
]
