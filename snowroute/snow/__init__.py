"""
Snow index and hazard classes.

Turns a composite into the normalized difference snow index, a binary
snow mask, a local snow percentage surface and four ordinal classes.
"""
