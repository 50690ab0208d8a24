"""API: camada HTTP de operação do servidor (health e readiness).

NÃO PODE conter: montagem de subsistemas nem regras de domínio; o Holder
é lido de ``app.state``.
"""
