from shortener.deletion.pipeline import DeletionPipeline


__all__ = ['DeletionPipeline']
