"""
Catering Quotes — menu-priced catering quotes, printable documents and email.

Packages:
    api/        Dashboard routes and templates
    forms/      Quote document rendering (HTML, PDF, email)
    agents/     Outbound email delivery
    core/       Record store, repositories, configuration, and paths
"""
