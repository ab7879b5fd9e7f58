"""
Admin session authentication: cookie-carried access/refresh JWTs.
"""
