"""Host health triage for model-facing clients.

This package contains the decision logic (classification, scoring,
next-step guidance, caching) and the domain models, isolated from the
operating system so it can be tested and reasoned about on its own.
"""
