# src/otto_flow/__init__.py
"""
Otto Flow — core de pipelines CI/CD definidos visualmente.

Este pacote raiz define o namespace público do Otto Flow. Um pipeline é
desenhado como um grafo de estágios (trigger, build, test, deploy, ...)
e este pacote decide se o grafo pode ser salvo ou executado, acompanha o
status das execuções reportado pelo serviço de build e organiza os logs
produzidos por elas.

Arquitetura em alto nível:
    - core.identifiers → normalização de ids e rotas
    - core.graph       → grafo de pipeline e validação
    - core.lifecycle   → status de execução
    - core.logs        → correlação de logs/builds
    - api              → clients HTTP das APIs consumidas

Limites explícitos:
    - Não executa estágios de build
    - Não aplica retry em chamadas remotas
"""

__version__ = "0.1.0"
