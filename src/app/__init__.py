"""App — ponte entre a sessão WhatsApp e o barramento de mensagens.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- coordinators/: loops de consumo da fila
- use_cases/: despacho de entrada, envio de saída e relay
- services/: classificação de mensagens e pipeline de mídia
- domain/: mensagem canônica, pedidos de envio, credenciais, contatos
- infra/: implementações concretas de IO
- protocols/: contratos/interfaces
- sessions/: ciclo de vida da conexão
- observability/: correlation_id e métricas via logs
- constants/: constantes do protocolo

Padrão: app executa; api adapta; fsm governa; utils apoia.
"""
