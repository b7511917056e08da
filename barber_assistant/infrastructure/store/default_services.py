from __future__ import annotations

from decimal import Decimal

from barber_assistant.domain.entities.service import Service

DEFAULT_SERVICES: tuple[Service, ...] = (
    Service("svc_1", "Corte Masculino", Decimal("50.00"), 45, "Corte de cabelo masculino tradicional"),
    Service("svc_2", "Barba", Decimal("40.00"), 30, "Modelagem e aparo de barba"),
    Service("svc_3", "Corte + Barba", Decimal("80.00"), 60, "Combo corte masculino e barba"),
    Service("svc_4", "Navalhado", Decimal("35.00"), 25, "Navalhado completo"),
    Service("svc_5", "Coloração", Decimal("70.00"), 90, "Coloração de cabelo"),
    Service("svc_6", "Hidratação", Decimal("45.00"), 40, "Tratamento de hidratação profunda"),
)
