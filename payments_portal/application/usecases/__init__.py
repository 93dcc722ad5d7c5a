"""
Use Cases Layer (Business Operations)

Structure
---------
usecases/
├── auth/           # Login, refresh, logout, current employee
└── transactions/   # Verify, submit batch, detail, statistics

Usage
-----
    from payments_portal.application.usecases.auth import LoginEmployeeUseCase
    from payments_portal.application.usecases.transactions import VerifyTransactionUseCase
"""
