"""Prediction scoring domain modules."""
