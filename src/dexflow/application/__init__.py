"""Application layer"""
