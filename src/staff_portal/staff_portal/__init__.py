"""Staff Portal package.

Organized by feature modules (users, leaves, notifications) with a thin Flask
controller layer on top of service/repository layers.
"""
