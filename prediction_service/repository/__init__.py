"""Acceso SQL para predicciones persistidas."""
