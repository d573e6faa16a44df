"""Endpoints de controle das instâncias WhatsApp."""
