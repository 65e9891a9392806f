"""
Services module - one service per screen, all backed by MongoDB.
"""
