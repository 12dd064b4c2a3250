"""Admission control: local, cloud or reject, decided before any call."""

from hybrid_inference.admission.controller import AdmissionController, TokenCeilings

__all__ = ["AdmissionController", "TokenCeilings"]
