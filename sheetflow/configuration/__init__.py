"""Fluent sheet configuration: property keys, column settings and sheet layout."""
