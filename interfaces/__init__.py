"""User-facing entry points for the agents"""
