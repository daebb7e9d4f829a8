"""Sonaverse CMS middleware."""
