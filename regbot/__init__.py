"""
Registration chatbot: a slot-filling dialogue that collects a user's
registration details over several free-text turns.
"""
