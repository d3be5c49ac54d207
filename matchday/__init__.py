"""Matchday - team scheduling with live availability and readiness"""
