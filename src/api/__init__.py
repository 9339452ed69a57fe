"""API — borda HTTP do processo.

Subpastas:
- routes/: health/readiness, estado da sessão e publicação direta na fila

NÃO PODE conter: FSM, regras de sessão, orquestração de use cases.
"""
