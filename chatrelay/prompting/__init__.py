"""Prompting package.

Deterministic helpers that turn an OpenAI-style message list into the single
prompt string relayed upstream. No model resolution or upstream invocation.
"""
