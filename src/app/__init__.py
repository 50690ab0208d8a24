"""App: coração do servidor: composition root, domínio e infraestrutura.

Subpastas:
- bootstrap/: composition root (Holder, montagem e shutdown)
- domain/: modelos de usuário, dashboards e regras
- infra/: implementações concretas de IO (cache, banco, arquivos, rede)
- services/: tokens, regras de eventos e limites
- sessions/: canais conectados por usuário
- users/: registro de usuários em memória
- workers/: tarefas periódicas
- observability/: correlation_id e contadores

Padrão: app executa; api expõe; config configura; utils apoia.
"""
