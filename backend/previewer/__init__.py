"""Watermarked preview service for uploaded images and videos."""
