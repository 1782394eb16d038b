"""
Lotus - a test runner for Logstash filter rules.

Builds a Logstash image around a project's rules, feeds each test case's
input event through it and compares the output with the expected event.
"""

__version__ = "0.4.3"
