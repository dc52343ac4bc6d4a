"""
ProductHub Backend — API Routes Package
=========================================

Route Inventory:
    - users.py:     /users/add, /users/login, /users/refreshToken,
                    /users/logout, /users/getAll, /users/profile,
                    /users/updateProfileImage, /users/delete,
                    /users/filterEmail, /users/sortByEmail
    - products.py:  /products/add, /products/getAll, /products/search,
                    /products/update, /products/delete,
                    /products/updateProductImage
    - health.py:    /health

Routes stay thin: extract request data, call a service, wrap the result in
the Envelope. Business rules live in services.
"""
