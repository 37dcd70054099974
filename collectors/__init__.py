"""
Built-in metric collectors.
"""
