import pytest
from vetclinic.scheduler import parse_cron_expression


def test_hourly_default():
    assert parse_cron_expression('0 * * * *') == {'minute': {0}}


def test_ranges_steps_and_lists():
    kwargs = parse_cron_expression('*/15 8-17 1,15 * 1-5')
    assert kwargs['minute'] == {0, 15, 30, 45}
    assert kwargs['hour'] == set(range(8, 18))
    assert kwargs['day'] == {1, 15}
    assert 'month' not in kwargs
    # cron Monday-Friday becomes arq's 0-4
    assert kwargs['weekday'] == {0, 1, 2, 3, 4}


def test_sunday_is_both_zero_and_seven():
    assert parse_cron_expression('30 7 * * 0')['weekday'] == {6}
    assert parse_cron_expression('30 7 * * 7')['weekday'] == {6}


@pytest.mark.parametrize('expression', ['0 * * *', '61 * * * *', '0 25 * * *', '*/0 * * * *', 'a * * * *'])
def test_invalid_expressions(expression):
    with pytest.raises(ValueError):
        parse_cron_expression(expression)
