# core/__init__.py
"""Prescription analysis and report pipeline"""
