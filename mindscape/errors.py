# mindscape/errors.py
# -*- coding: utf-8 -*-
"""
Taxonomie des erreurs métier de Mindscape.

Chaque erreur porte son statut HTTP : l'API n'a qu'à le recopier dans la réponse.
"""

from __future__ import annotations


class MindscapeError(Exception):
    """Erreur de base (500 par défaut)."""
    http_status = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message or self.__class__.__name__


class NotFound(MindscapeError):
    """Entité référencée absente."""
    http_status = 404


class PermissionDenied(MindscapeError):
    """L'appelant n'est pas propriétaire de la cible."""
    http_status = 403


class InvalidArgument(MindscapeError, ValueError):
    """Entrée mal formée (ex. note hors de 1..5)."""
    http_status = 400


class Unauthenticated(MindscapeError):
    """Jeton absent ou refusé par le fournisseur d'identité."""
    http_status = 401


class SynthesisError(MindscapeError):
    """Synthèse vocale impossible ou non supportée."""


class GenerationError(MindscapeError):
    """Échec de génération du script (ex. erreur du LLM)."""


class StorageError(MindscapeError):
    """Échec de la base de données. Rejouable par l'appelant, jamais rejoué ici."""
