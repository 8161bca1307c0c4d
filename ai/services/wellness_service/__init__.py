# -*- coding: utf-8 -*-
"""Service layer around wellness_engine: storage, sessions and HTTP routes."""
