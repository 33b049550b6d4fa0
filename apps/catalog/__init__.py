"""Catalog app package.

Holds the bookable services and their optional packages. The booking
domain only reads from the catalog: unit rates are copied into booking
items at creation time and never re-read afterwards.
"""
