"""Top-level package for the e-commerce article agent.

This package contains the application entrypoint and all supporting modules
for selecting fresh topics, generating articles with a language model and
storing the results.
"""

__all__ = []
