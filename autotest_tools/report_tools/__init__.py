"""Allure attachment helpers and report generation."""
