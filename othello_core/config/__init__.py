"""Bundled default configuration"""
