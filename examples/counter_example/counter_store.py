from unistore import LoggerMiddleware, ThunkMiddleware, create_store

from counter_reducers import counter_reducer

# 創建Store
store = create_store(counter_reducer, middleware=[ThunkMiddleware, LoggerMiddleware])
