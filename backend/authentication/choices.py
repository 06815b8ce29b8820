USER_ROLES = [
    ('FARMER', 'Farmer'),
    ('ADMIN', 'Admin'),
    ('STAFF', 'Staff'),
]
