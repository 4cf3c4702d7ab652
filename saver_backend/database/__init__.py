"""
The `database` package holds everything Saver stores: users and their status,
cases and their messages, uploaded file rows, support chats and sales leads.

Contents:
    - config:
        Settings and the SQLAlchemy engine.

    - entities:
        ORM models of the tables.

    - daos:
        Data Access Objects with the queries of each table.

    - core:
        Service functions used by the routers: authentication, case and chat
        orchestration, support, admin back-office.

    - helpers:
        Transaction decorator and timestamp utilities.
"""
