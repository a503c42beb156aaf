# -*- coding: utf-8 -*-
"""Probationer desktop UI."""
