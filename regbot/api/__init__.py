"""
HTTP layer for the registration chatbot.
"""
