"""Tests for technical indicators."""

import math

import pytest

from core.indicators import (
    atr,
    awesome_oscillator,
    bollinger_bands,
    cci,
    chaikin_money_flow,
    coppock_curve,
    donchian_channels,
    elder_ray,
    ema,
    heikin_ashi,
    highest,
    ichimoku_cloud,
    keltner_channels,
    lowest,
    macd,
    mfi,
    momentum,
    obv,
    parabolic_sar,
    pivot_points,
    point_of_control,
    roc,
    rsi,
    sma,
    smi,
    stochastic,
    supertrend,
    true_range,
    volume_delta,
    vwap,
    williams_r,
    wma,
)


def _rising(n: int, start: float = 100.0) -> list[float]:
    return [start + i for i in range(n)]


def _no_nan(values) -> bool:
    return all(v is None or not math.isnan(v) for v in values)


class TestMovingAverages:
    """Tests for SMA / EMA / WMA."""

    def test_sma_basic(self):
        result = sma([float(i) for i in range(1, 11)], 3)

        assert result[0] is None
        assert result[1] is None
        # (1+2+3)/3 = 2, (2+3+4)/3 = 3
        assert result[2] == pytest.approx(2.0)
        assert result[3] == pytest.approx(3.0)
        assert len(result) == 10

    def test_ema_seeded_with_sma(self):
        result = ema([float(i) for i in range(1, 11)], 5)

        assert result[3] is None
        # Seed: SMA of first 5 = 3
        assert result[4] == pytest.approx(3.0)
        # 3 + 2/6 * (6 - 3) = 4
        assert result[5] == pytest.approx(4.0)

    def test_ema_insufficient_data(self):
        result = ema([100.0, 101.0, 102.0], 10)

        assert len(result) == 3
        assert all(v is None for v in result)

    def test_non_positive_period_is_all_none(self):
        assert all(v is None for v in sma([1.0, 2.0, 3.0], 0))
        assert all(v is None for v in ema([1.0, 2.0, 3.0], -2))

    def test_wma_weights_newest_most(self):
        result = wma([1.0, 2.0, 3.0], 3)

        # (1*1 + 2*2 + 3*3) / 6
        assert result[2] == pytest.approx(14 / 6)

    def test_ema_stays_between_min_and_max(self):
        values = [10.0, 12.0, 9.0, 15.0, 11.0, 13.0, 8.0, 14.0]
        result = ema(values, 3)

        for v in result[2:]:
            assert min(values) <= v <= max(values)


class TestHighestLowest:

    def test_highest_basic(self):
        result = highest([1.0, 3.0, 2.0, 5.0, 4.0], 3)

        assert result[:2] == [None, None]
        assert result[2:] == [3.0, 5.0, 5.0]

    def test_lowest_basic(self):
        result = lowest([5.0, 3.0, 4.0, 1.0, 6.0], 3)

        assert result[2:] == [3.0, 1.0, 1.0]


class TestRSI:
    """Tests for RSI (Wilder smoothing)."""

    def test_first_value_at_period(self):
        result = rsi(_rising(20), 14)

        assert all(v is None for v in result[:14])
        assert result[14] is not None

    def test_no_losses_is_100(self):
        result = rsi(_rising(20), 14)

        assert result[14] == pytest.approx(100.0)
        assert result[-1] == pytest.approx(100.0)

    def test_only_losses_is_0(self):
        result = rsi([100.0 - i for i in range(20)], 14)

        assert result[-1] == pytest.approx(0.0)

    def test_alternating_series(self):
        result = rsi([1.0, 2.0, 1.0, 2.0, 1.0], 2)

        # Seed: avg gain 0.5, avg loss 0.5
        assert result[2] == pytest.approx(50.0)
        # gain (0.5 + 1) / 2 = 0.75, loss 0.5 / 2 = 0.25 -> RS 3
        assert result[3] == pytest.approx(75.0)

    def test_bounded(self):
        values = [100.0, 103.0, 99.0, 104.0, 98.0, 101.0, 107.0, 95.0, 102.0, 100.0] * 3
        result = rsi(values, 5)

        assert all(0.0 <= v <= 100.0 for v in result if v is not None)


class TestFlatSeries:
    """Degenerate (zero-range) input never produces NaN."""

    def test_flat_series_defaults(self):
        closes = [100.0] * 30
        highs = [100.0] * 30
        lows = [100.0] * 30

        rsi_values = rsi(closes, 14)
        wr = williams_r(highs, lows, closes, 14)

        assert _no_nan(rsi_values)
        assert _no_nan(wr)
        # Zero average loss -> 100
        assert all(v == pytest.approx(100.0) for v in rsi_values[14:])
        assert all(v == pytest.approx(-50.0) for v in wr[13:])

    def test_flat_stochastic_and_cci(self):
        flat = [50.0] * 30

        stoch = stochastic(flat, flat, flat, 14, 3, 3)
        assert all(v == pytest.approx(50.0) for v in stoch.k if v is not None)
        assert all(v == pytest.approx(0.0) for v in cci(flat, flat, flat, 20) if v is not None)

    def test_zero_volume_window(self):
        highs = [11.0] * 25
        lows = [9.0] * 25
        closes = [10.0] * 25
        volumes = [0.0] * 25

        assert all(v is None for v in vwap(highs, lows, closes, volumes, 20))
        cmf = chaikin_money_flow(highs, lows, closes, volumes, 20)
        assert cmf[18] is None
        assert all(v == pytest.approx(0.0) for v in cmf[19:])

    def test_roc_zero_reference(self):
        assert roc([0.0, 5.0], 1) == [None, 0.0]
        assert roc([10.0, 11.0], 1)[1] == pytest.approx(10.0)


class TestATR:

    def test_true_range_uses_previous_close(self):
        result = true_range([10.0, 15.0], [9.0, 14.0], [9.5, 14.5])

        assert result[0] == pytest.approx(1.0)
        # max(1, |15 - 9.5|, |14 - 9.5|)
        assert result[1] == pytest.approx(5.5)

    def test_atr_constant_range(self):
        result = atr([102.0] * 20, [100.0] * 20, [101.0] * 20, 9)

        assert result[8] is None
        assert result[9] == pytest.approx(2.0)
        assert result[-1] == pytest.approx(2.0)

    def test_atr_insufficient_data(self):
        result = atr([102.0] * 5, [100.0] * 5, [101.0] * 5, 9)

        assert all(v is None for v in result)


class TestMomentum:

    def test_momentum(self):
        result = momentum([1.0, 2.0, 4.0, 7.0], 2)

        assert result == [None, None, 3.0, 5.0]


class TestMACD:

    def test_warm_up_spans(self):
        result = macd(_rising(40), 12, 26, 9)

        assert result.macd[24] is None
        assert result.macd[25] is not None
        # Signal needs signal_period values of the MACD line
        assert result.signal[32] is None
        assert result.signal[33] is not None
        assert result.histogram[33] == pytest.approx(result.macd[33] - result.signal[33])

    def test_rising_series_macd_positive(self):
        result = macd(_rising(40), 12, 26, 9)

        assert all(v > 0 for v in result.macd if v is not None)


class TestChannels:

    def test_bollinger_flat_series_collapses(self):
        bands = bollinger_bands([10.0] * 25, 20, 2.0)

        assert bands.upper[19] == pytest.approx(10.0)
        assert bands.lower[19] == pytest.approx(10.0)
        assert bands.middle[18] is None

    def test_bollinger_ordering(self):
        values = [10.0, 11.0, 9.0, 12.0, 8.0, 13.0] * 5
        bands = bollinger_bands(values, 5, 2.0)

        for u, m, l in zip(bands.upper, bands.middle, bands.lower):
            if m is not None:
                assert l <= m <= u

    def test_donchian(self):
        bands = donchian_channels([1.0, 5.0, 3.0, 2.0], [0.0, 2.0, 1.0, 1.5], 3)

        assert bands.upper[2] == pytest.approx(5.0)
        assert bands.lower[2] == pytest.approx(0.0)
        assert bands.middle[3] == pytest.approx((5.0 + 1.0) / 2)

    def test_keltner_defined_after_atr_warm_up(self):
        closes = _rising(30)
        bands = keltner_channels([c + 1 for c in closes], [c - 1 for c in closes], closes, 10, 2.0)

        assert bands.middle[9] is None
        assert bands.middle[10] is not None
        assert bands.lower[10] < bands.middle[10] < bands.upper[10]

    def test_vwap_weighted_by_volume(self):
        highs = [10.0, 20.0]
        lows = [10.0, 20.0]
        closes = [10.0, 20.0]
        result = vwap(highs, lows, closes, [1.0, 3.0], 2)

        # (10*1 + 20*3) / 4
        assert result[1] == pytest.approx(17.5)

    def test_pivot_points_use_prior_window(self):
        result = pivot_points([10.0, 12.0, 11.0], [8.0, 9.0, 7.0], [9.0, 11.0, 10.0], 2)

        pp = (12.0 + 8.0 + 11.0) / 3
        assert result.pivot[1] is None
        assert result.pivot[2] == pytest.approx(pp)
        assert result.r1[2] == pytest.approx(2 * pp - 8.0)
        assert result.s1[2] == pytest.approx(2 * pp - 12.0)
        assert result.r2[2] == pytest.approx(pp + 4.0)
        assert result.s3[2] == pytest.approx(8.0 - 2 * (12.0 - pp))

    def test_ichimoku_displacement(self):
        closes = [100.0 + (i % 7) * 2 - (i % 3) for i in range(120)]
        highs = [c + 1.5 for c in closes]
        lows = [c - 1.5 for c in closes]
        cloud = ichimoku_cloud(highs, lows, closes, 9, 26, 52, 26)

        i = 90
        assert cloud.senkou_a[i] == pytest.approx((cloud.tenkan[i - 26] + cloud.kijun[i - 26]) / 2)
        assert cloud.chikou[i] == pytest.approx(closes[i + 26])
        assert cloud.chikou[-1] is None
        assert cloud.senkou_b[26 + 50] is None
        assert cloud.senkou_b[26 + 51] is not None


class TestTrendOverlays:

    def test_supertrend_uptrend(self):
        closes = _rising(40)
        result = supertrend([c + 1 for c in closes], [c - 1 for c in closes], closes, 10, 3.0)

        assert result.direction[9] is None
        assert all(d == 1 for d in result.direction[10:])
        assert all(line < c for line, c in zip(result.line[10:], closes[10:]))

    def test_parabolic_sar_uptrend(self):
        closes = _rising(30)
        result = parabolic_sar([c + 1 for c in closes], [c - 1 for c in closes], closes)

        assert result.sar[0] is None
        assert all(d == 1 for d in result.direction[1:])
        assert all(s < c - 1 + 1e-9 for s, c in zip(result.sar[1:], closes[1:]))

    def test_supertrend_flips_and_bands_only_tighten(self):
        closes = [10.0, 11.0, 12.0, 12.0, 11.0, 10.0, 9.0, 8.0, 9.0, 10.0, 11.0]
        highs = [c + 1 for c in closes]
        lows = [c - 1 for c in closes]

        # Period 1 makes ATR the true range (2.0 here), so bands are close +/- 2
        result = supertrend(highs, lows, closes, 1, 1.0)

        assert result.direction == [None, 1, 1, 1, 1, 1, -1, -1, -1, -1, 1]
        # Lower band holds at 10 while the basic band drops to 9 and 8
        assert result.line[2:6] == pytest.approx([10.0, 10.0, 10.0, 10.0])
        # Upper band tightened 13 -> 12 -> 11 before the flip down
        assert result.line[6] == pytest.approx(11.0)
        assert result.line[7:10] == pytest.approx([10.0, 10.0, 10.0])
        assert result.line[10] == pytest.approx(9.0)

    def test_parabolic_sar_acceleration_cap(self):
        highs = [10.0, 11.0, 12.0, 13.0, 12.5, 12.0, 11.0]
        lows = [8.0, 9.0, 10.0, 11.0, 11.5, 9.0, 8.5]
        closes = [9.0, 10.0, 11.5, 12.0, 12.0, 10.0, 9.0]

        result = parabolic_sar(highs, lows, closes, 0.1, 0.1, 0.2)

        # Factor capped at 0.2: 8.8 + 0.2 * (13 - 8.8)
        assert result.sar[4] == pytest.approx(9.64)
        assert result.sar[1:4] == pytest.approx([8.0, 8.0, 8.8])

    def test_parabolic_sar_reversal_resets_factor(self):
        highs = [10.0, 11.0, 12.0, 13.0, 12.5, 12.0, 11.0]
        lows = [8.0, 9.0, 10.0, 11.0, 11.5, 9.0, 8.5]
        closes = [9.0, 10.0, 11.5, 12.0, 12.0, 10.0, 9.0]

        result = parabolic_sar(highs, lows, closes, 0.1, 0.1, 0.2)

        assert result.direction == [None, 1, 1, 1, 1, -1, -1]
        # Flip jumps to the prior extreme point
        assert result.sar[5] == pytest.approx(13.0)
        # Restarted at 0.1: 13 + 0.1 * (9 - 13)
        assert result.sar[6] == pytest.approx(12.6)

    def test_heikin_ashi_first_candle(self):
        ha = heikin_ashi([10.0, 11.0], [12.0, 13.0], [9.0, 10.0], [11.0, 12.0])

        assert ha.open[0] == pytest.approx(10.5)
        assert ha.close[0] == pytest.approx((10 + 12 + 9 + 11) / 4)
        assert ha.open[1] == pytest.approx((ha.open[0] + ha.close[0]) / 2)


class TestVolume:

    def test_obv(self):
        assert obv([1.0, 2.0, 1.0, 1.0], [10.0, 20.0, 30.0, 40.0]) == [0.0, 20.0, -10.0, -10.0]

    def test_obv_empty(self):
        assert obv([], []) == []


class TestOscillatorValues:

    def test_awesome_oscillator(self):
        median = [1.0, 3.0, 8.0, 4.0]

        result = awesome_oscillator([m + 1 for m in median], [m - 1 for m in median], 2, 3)

        # SMA2 of the median minus SMA3: 5.5 - 4, 6 - 5
        assert result[:2] == [None, None]
        assert result[2:] == pytest.approx([1.5, 1.0])

    def test_coppock_curve(self):
        # ROC1 = [_, 100, 25, -20, 50], ROC2 = [_, _, 150, 0, 20]
        result = coppock_curve([10.0, 20.0, 25.0, 20.0, 30.0], 2, 1, 2)

        # WMA2 of [175, -20, 70]: (175 + 2 * -20) / 3, (-20 + 2 * 70) / 3
        assert result[:3] == [None, None, None]
        assert result[3:] == pytest.approx([45.0, 40.0])

    def test_elder_ray(self):
        result = elder_ray([11.0, 13.0, 16.0], [9.0, 11.0, 12.0], [10.0, 12.0, 14.0], 2)

        assert result.ema[0] is None
        assert result.ema[1:] == pytest.approx([11.0, 13.0])
        assert result.bull_power[1:] == pytest.approx([2.0, 3.0])
        assert result.bear_power[1:] == pytest.approx([0.0, -1.0])

    def test_stochastic_smoothing(self):
        highs = [10.0, 12.0, 13.0, 14.0, 14.0]
        lows = [8.0, 9.0, 10.0, 11.0, 12.0]
        closes = [9.0, 11.0, 10.0, 14.0, 12.0]

        # Raw %K over 2 candles: [_, 75, 25, 100, 33.33]
        result = stochastic(highs, lows, closes, 2, 2, 2)

        assert result.k[:2] == [None, None]
        assert result.k[2:] == pytest.approx([50.0, 62.5, 200 / 3])
        assert result.d[:3] == [None, None, None]
        assert result.d[3:] == pytest.approx([56.25, (62.5 + 200 / 3) / 2])


class TestVolumeFlow:

    def test_mfi(self):
        typical = [10.0, 12.0, 11.0, 13.0]

        # Flows [_, +24, -11, +13]
        result = mfi(typical, typical, typical, [1.0, 2.0, 1.0, 1.0], 2)

        assert result[:2] == [None, None]
        assert result[2] == pytest.approx(100 * 24 / 35)
        assert result[3] == pytest.approx(100 * 13 / 24)

    def test_mfi_one_sided_and_flat(self):
        rising = [1.0, 2.0, 3.0]
        flat = [5.0, 5.0, 5.0]

        assert mfi(rising, rising, rising, [1.0] * 3, 2)[2] == 100.0
        assert mfi(flat, flat, flat, [1.0] * 3, 2)[2] == 50.0

    def test_smi(self):
        result = smi([1.0, 3.0, 2.0, 2.0], 2, 1)

        assert result.smi[0] is None
        assert result.smi[1:] == pytest.approx([100.0, -100.0, 0.0])
        assert result.signal[1:] == pytest.approx([100.0, -100.0, 0.0])

    def test_smi_skips_leading_gap(self):
        result = smi([None, 1.0, 3.0, 2.0, 2.0], 2, 1)

        assert result.smi[:2] == [None, None]
        assert result.smi[2:] == pytest.approx([100.0, -100.0, 0.0])

    def test_volume_delta(self):
        result = volume_delta([1.0, 2.0, 3.0], [2.0, 1.0, 3.0], [10.0, 20.0, 30.0], 2)

        assert result.delta == [10.0, -20.0, 0.0]
        assert result.cumulative == [None, -10.0, -20.0]

    def test_point_of_control(self):
        highs = [2000.0, 2010.0, 2020.0, 2030.0]
        lows = [1990.0, 1995.0, 2000.0, 2010.0]
        # 10-point bins, half rounds up: 1990, 2010, 2000, 2020
        closes = [1994.0, 2005.0, 2004.0, 2021.0]

        result = point_of_control(highs, lows, closes, [5.0, 2.0, 2.0, 1.0], 3)

        # The 2010 and 2000 bins tie on the last window; the first one wins
        assert result == [None, None, 1990.0, 2010.0]

    def test_point_of_control_flat_window(self):
        flat = [5.0, 5.0, 5.0]

        assert point_of_control(flat, flat, flat, [1.0] * 3, 2) == [None, 5.0, 5.0]
