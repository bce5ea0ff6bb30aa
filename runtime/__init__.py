"""Runtime support: agent configuration and the completion client"""
