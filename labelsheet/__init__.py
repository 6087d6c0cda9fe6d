"""LabelSheet: печать листов со штрихкодами товаров."""
