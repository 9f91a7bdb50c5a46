# api/__init__.py
"""HTTP layer for RxLens"""
