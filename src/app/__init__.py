"""App — coração do engine: instâncias, infraestrutura e ciclo de vida.

Subpastas:
- bootstrap/: composition root (EngineContext, inicialização, wiring)
- sessions/: instâncias WhatsApp, registry e lock leitores/escritor
- services/: allow-list de remetentes, QR no terminal
- infra/: implementações concretas de IO (store, webhook, biblioteca)
- protocols/: contratos/interfaces consumidos pelo core
- domain/: eventos, envelopes e JIDs
- observability/: contexto de correlação para logs

Módulos:
- app.py: aplicação FastAPI
- supervisor.py: entrypoint do processo

Padrão: app executa; api adapta; fsm governa; utils apoia.
"""
