import numpy as np

def leapfrog(q, v, dt, accel, nsteps):
    for _ in range(nsteps):
        q, v = leapfrogStep(q, v, dt, accel)
    return q, v

def leapfrogStep(q, v, dt, accel):
    '''
    One drift-kick-drift step. `accel(q)` returns accelerations of shape (N, D).
    '''
    q_half = leapfrogLeap_q(q, v, dt/2)
    v_full = leapfrogLeap_v(v, accel(q_half), dt)
    q_full = leapfrogLeap_q(q_half, v_full, dt/2)
    return q_full, v_full

def leapfrogLeap_q(q, v, dt):
    return q + v * dt

def leapfrogLeap_v(v, a, dt):
    return v + np.asarray(a) * dt
