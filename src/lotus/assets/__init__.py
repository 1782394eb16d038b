"""Packaged Logstash configuration and pipeline templates."""
