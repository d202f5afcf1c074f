"""Photographer assignments and reliability scoring"""
