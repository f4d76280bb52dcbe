"""Org Hierarchy package.

The package is organized by feature modules (employees, hierarchy) with a thin
Flask controller layer on top of service/repository layers. The hierarchy
edit engine itself (builder, guard, mutator, tracker, visibility, sync) has no
Flask or database dependency.
"""
