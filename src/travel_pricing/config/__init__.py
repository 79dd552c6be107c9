"""Configuration subpackage - settings and strategy switches."""
