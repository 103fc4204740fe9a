"""Command-line tools"""
