"""
Business logic. Each module works on one aggregate and takes the request's
``AsyncSession`` as its first argument.
"""
