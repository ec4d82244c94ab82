"""Clientes de colaboradores externos."""
