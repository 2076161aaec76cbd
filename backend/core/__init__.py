"""Core signal engine: candle models, indicators, structure detection,
strategies and consensus.

This package contains pure computation with no I/O dependencies
(no files or network access). It is shared between the live evaluation
layer (app/) and the backtesting system (backtest/).
"""
