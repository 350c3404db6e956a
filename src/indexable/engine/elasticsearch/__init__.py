from indexable.engine.elasticsearch.gateway import ElasticsearchGateway, ElasticsearchIndices

__all__ = ["ElasticsearchGateway", "ElasticsearchIndices"]
