"""API — camada de borda HTTP (controle das instâncias).

Subpastas:
- routes/: endpoints HTTP (instâncias, health)

NÃO PODE conter: FSM, regras de sessão, acesso direto à biblioteca.
"""
