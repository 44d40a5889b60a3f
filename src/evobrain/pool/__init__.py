from evobrain.pool.population import Population

__all__ = ['Population']
